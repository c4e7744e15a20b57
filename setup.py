from setuptools import setup, find_packages

setup(
    name="tilegen",
    version="0.1.0",
    description="Tile map generation with a simplified Wave Function Collapse",
    packages=find_packages(exclude=("tests", "tests.*")),
    py_modules=["biome_wfc"],
    install_requires=[
        "numpy",
        "pygame",
        "pyyaml",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.10",
)
