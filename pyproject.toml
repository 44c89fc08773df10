[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edgestrap"
version = "0.1.0"
description = "Service bootstrap helpers: metrics registry and message-bus reporting, configuration-backed secrets, startup timer, log bridging and a plain TCP listener"
requires-python = ">=3.10"
dependencies = []
keywords = ["bootstrap", "metrics", "secrets", "telemetry", "microservices", "edge"]
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
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["edgestrap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
