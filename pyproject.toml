[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hayate"
version = "0.1.0"
description = "Event-driven trading bot toolkit with fixed-point prices, order books, positions and a Bybit order book feed"
requires-python = ">=3.10"
keywords = ["trading", "orderbook", "bybit", "websocket", "bot", "asyncio", "fixed-point"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "sortedcontainers>=2.4",
    "httpx>=0.27",
    "websockets>=12.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
    "respx>=0.21",
]

[project.scripts]
hayate-bybit = "hayate.bybit:main"

[tool.hatch.build.targets.wheel]
packages = ["hayate"]

[tool.hatch.build.targets.sdist]
include = ["hayate", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
