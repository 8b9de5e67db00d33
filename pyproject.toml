[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "winboxkit"
version = "0.1.0"
description = "The RouterOS nv::Message format in binary and WebFig text form, with MD4 and RC4 helpers"
requires-python = ">=3.10"
keywords = ["routeros", "winbox", "nv-message", "md4", "rc4", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]
dependencies = []

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["winboxkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
