[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "collateral-custody"
version = "0.1.0"
description = "In-memory collateral custody contracts for a money market: deposits, locks, liquidations and reward distribution"
requires-python = ">=3.10"
dependencies = []
keywords = ["collateral", "custody", "money-market", "lending", "liquidation", "smart-contract"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["collateral_custody"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
