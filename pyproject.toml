[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tetradec"
version = "0.0.9"
description = "TETRA downlink protocol decoding: burst synchronisation, upper MAC, LLC and MLE parsing"
requires-python = ">=3.10"
dependencies = []
keywords = ["tetra", "radio", "sdr", "decoder", "mac", "llc", "protocol"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tetradec"]

[tool.pytest.ini_options]
addopts = "-ra"
