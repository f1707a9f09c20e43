[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "junos_exporter"
version = "0.1.0"
description = "Collectors that turn Junos XML command output into Prometheus-style metrics"
requires-python = ">=3.10"
dependencies = []
keywords = ["junos", "juniper", "prometheus", "metrics", "monitoring", "network"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["junos_exporter"]

[tool.pytest.ini_options]
addopts = "-ra"
