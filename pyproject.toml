[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmqclient"
version = "0.1.0"
description = "Message-queue consumer building blocks: message model, queue allocation strategies, consume statistics and push-consumer options"
requires-python = ">=3.10"
dependencies = []
keywords = ["message queue", "consumer", "rebalance", "allocation", "statistics"]
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
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rmqclient"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
