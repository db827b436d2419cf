[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flagkit"
version = "0.1.0"
description = "Feature flag evaluation over the OpenFeature Remote Evaluation Protocol, with context helpers for Statsig and Unleash"
requires-python = ">=3.10"
dependencies = []
keywords = ["feature-flags", "openfeature", "ofrep", "statsig", "unleash"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["flagkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
