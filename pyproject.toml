[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jp2lam"
version = "0.1.0"
description = "JPEG 2000 coding building blocks: MQ arithmetic coder, packet containers and perceptual masking"
requires-python = ">=3.10"
dependencies = []
keywords = ["jpeg2000", "mq-coder", "arithmetic-coding", "perceptual-masking", "image", "compression"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jp2lam"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
