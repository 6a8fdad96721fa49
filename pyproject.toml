[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kelk"
version = "0.2.0"
description = "Storage-backed collections and a contract execution environment with CBOR messages and mockable storage."
requires-python = ">=3.10"
dependencies = [
    "cbor2",
]
keywords = ["contract", "storage", "cbor", "binary-search-tree", "vector", "mock"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kelk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
