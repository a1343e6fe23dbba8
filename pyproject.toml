[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "leatherkit"
version = "0.1.0"
description = "Personal notes toolkit: a round-tripping Markdown syntax tree, reminder parsing, a notes database, Dropbox access and small HTTP helpers"
requires-python = ">=3.10"
keywords = ["markdown", "notes", "reminders", "dropbox", "wsgi", "sqlite"]
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
    "Topic :: Text Processing :: Markup :: Markdown",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
    "Topic :: Utilities",
]
dependencies = [
    "requests",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["leatherkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
