[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edgeapp"
version = "0.1.0"
description = "Application-service template: event pipeline functions, validated custom configuration and a service setup routine"
requires-python = ">=3.10"
dependencies = []
keywords = ["edge", "iot", "pipeline", "application-service", "events", "xml"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
edgeapp = "edgeapp.app:main"

[tool.hatch.build.targets.wheel]
packages = ["edgeapp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
