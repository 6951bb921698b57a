[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tunl"
version = "0.1.0"
description = "A WebSocket tunnel server speaking VMess, VLESS, Trojan and Bepass, with relay and VLESS upstreams"
requires-python = ">=3.11"
keywords = ["proxy", "tunnel", "websocket", "vmess", "vless", "trojan", "relay"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: No Input/Output (Daemon)",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: System :: Networking",
]
dependencies = [
    "aiohttp>=3.9",
    "cryptography>=41",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
]

[project.scripts]
tunl = "tunl.server:main"
tunl-schema = "tunl.schema:main"

[tool.hatch.build.targets.wheel]
packages = ["tunl"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
