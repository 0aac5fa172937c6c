from setuptools import setup, find_packages

setup(
    name="lanchat",
    version="1.0.0",
    description="Serverless LAN chat over UDP broadcast with checksummed frames and retry by id",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "colorama",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "lanchat = lanchat.client:main",
        ],
    },
    python_requires=">=3.10",
)
