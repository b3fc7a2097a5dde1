from setuptools import setup, find_packages

setup(
    name="streamscribe",
    version="0.1.0",
    description="Streaming speech-to-text client with incremental transcript reconciliation",
    author="",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.8.0",
        "yarl>=1.8.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0.0",
        "rich>=12.5.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "streamscribe=streamscribe.main:main",
        ],
    },
)
