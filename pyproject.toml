[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zaplog"
version = "0.1.0"
description = "Building blocks for leveled, structured logging: dynamic levels, sinks, stack traces and test helpers"
requires-python = ">=3.11"
dependencies = []
keywords = ["logging", "structured-logging", "log-level", "sinks", "stacktrace"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
zaplog-readme = "zaplog.readme:main"

[tool.hatch.build.targets.wheel]
packages = ["zaplog"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
