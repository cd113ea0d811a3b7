"""Setup direct trajopt package."""

from pathlib import Path

from setuptools import setup, find_namespace_packages

HERE = Path(__file__).parent


# Read requirements from requirements.txt
def read_requirements(file_name):
    with open(HERE / file_name, "r") as f:
        return [line for line in f.read().splitlines() if line and not line.startswith("#")]


setup(
    name="direct_trajopt",
    version="0.1",
    packages=find_namespace_packages(include=["direct_trajopt*", "trajopt_util*"]),
    python_requires=">=3.9",
    install_requires=read_requirements("requirements.txt"),
    extras_require={"dev": read_requirements("test-requirements.txt")},
)
