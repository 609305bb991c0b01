from setuptools import setup, find_packages

setup(
    name="mcstate",
    version="0.1.0",
    author="Sanjan Muchandimath",
    description="Checkpointable MCMC state with self-tuning Bactrian proposal operators",
    packages=find_packages(include=["mcstate", "mcstate.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scipy",
    ],
    extras_require={
        "test": ["pytest"],
        "examples": ["matplotlib"],
    },
)
