[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "otterjobs"
version = "0.1.0"
description = "Building blocks for a pipeline daemon: timers, agent session log monitoring, workspace preparation, daemon paths and a length-prefixed JSON IPC protocol."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "pipeline",
    "daemon",
    "ipc",
    "scheduler",
    "agents",
    "workflow",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["otterjobs"]

[tool.hatch.build.targets.sdist]
include = [
    "otterjobs",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
strict = true
