"""JPEG 2000 coding building blocks: MQ coder, packet containers and perceptual masking."""

__version__ = "0.1.0"

__all__ = [
    "contrast_mask",
    "mq_decoder",
    "mq_encoder",
    "packets",
    "taubman",
    "tiles",
]