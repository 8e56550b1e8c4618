from setuptools import setup, find_packages

setup(
    name="meshcompressor",
    version="0.1.0",
    description="Quantizing, delta-coding mesh compressor for thin WebGL clients",
    packages=find_packages(include=["meshcompressor", "meshcompressor.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "zstandard",
        "cloudpickle",
        "hydra-core",
        "omegaconf",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "meshcompressor=meshcompressor.__main__:main",
        ],
    },
)
