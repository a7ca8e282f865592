[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hateengine"
version = "0.1.0"
description = "Game engine resources: encrypted HER archives, HEN navigation graphs, textures, anchored UI coordinates, input key codes and OBJ+MAP level models"
requires-python = ">=3.10"
keywords = ["game", "engine", "obj", "map", "navigation", "archive", "texture", "level"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "numpy",
    "pycryptodome",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hateengine"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
