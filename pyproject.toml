[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "r6dissect"
version = "0.1.0"
description = "Parse Rainbow Six Siege match replay (.rec) files into structured match data."
requires-python = ">=3.10"
dependencies = [
    "zstandard",
    "flask",
]
keywords = ["rainbow six siege", "replay", "dissect", "rec", "parser", "match statistics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: Flask",
    "Topic :: Games/Entertainment :: First Person Shooters",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
r6dissect-server = "r6dissect.server:main"

[tool.hatch.build.targets.wheel]
packages = ["r6dissect"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
