from setuptools import setup, find_packages

setup(
    name="conditionalmarkets",
    version="0.1.0",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "numpy",
        "scipy",
        "loguru",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
        ],
    },
)
