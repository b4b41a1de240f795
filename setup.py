from setuptools import setup, find_packages

setup(
    name="bond_engine",
    version="0.1.0",
    description="Bullet bond valuation engine: cash flows, price, duration, convexity, TCEA/TREA",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest",
            "scipy",
        ],
    },
    python_requires=">=3.8",
)
