[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "leggedopt"
version = "0.1.0"
description = "Whole-body control tasks, hierarchical QP solving and contact constraints for legged robots"
requires-python = ">=3.10"
keywords = [
    "legged robots",
    "whole-body control",
    "quadratic programming",
    "hierarchical optimization",
    "friction cone",
    "gait",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["leggedopt"]

[tool.pytest.ini_options]
addopts = "-ra"
