from setuptools import find_packages, setup

setup(
    name="gridsynth",
    version="0.1.0",
    description="Exact Clifford+T approximation of single-qubit Z-rotations by grid synthesis.",
    packages=find_packages(include=["gridsynth", "gridsynth.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.21",
        "mpmath>=1.3",
        "sympy>=1.12",
        "matplotlib>=3.5",
        "jsonschema>=4.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
        "docs": ["sphinx>=7.0", "sphinx_rtd_theme>=2.0"],
    },
)
