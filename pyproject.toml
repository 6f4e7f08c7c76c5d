[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "guardmw"
version = "1.0.0"
description = "Composable HTTP middleware for configuration services: request IDs, JWT auth, role checks, rate limiting, metrics and more"
requires-python = ">=3.10"
dependencies = [
    "pyjwt",
]
keywords = [
    "http",
    "middleware",
    "jwt",
    "rate-limiting",
    "cors",
    "authorization",
    "router",
]
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
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["guardmw"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
