[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "ospfsim"
version = "0.1.0"
description = "Discrete-event simulation of OSPF-style routers with traffic-aware shortest-path routing"
requires-python = ">=3.10"
dependencies = []
keywords = ["ospf", "routing", "dijkstra", "network", "simulation", "discrete-event"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ospfsim-static = "ospfsim.staticrouter:main"
ospfsim-traffic = "ospfsim.trafficrouter:main"

[tool.setuptools.packages.find]
include = ["ospfsim*"]

[tool.pytest.ini_options]
addopts = "-ra"
