from setuptools import setup, find_packages

setup(
    name="ftc-power-ratings",
    version="0.1.0",
    description="OPR, DPR and CCWM alliance power ratings for FIRST Tech Challenge events",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.22.4",
        "pandas>=1.5.3",
        "scipy>=1.10.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "ftc-ratings=ftc_ratings.main:main",
        ],
    },
)
