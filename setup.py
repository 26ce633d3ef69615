from setuptools import find_packages, setup

setup(
    name="licfile",
    version="0.1.0",
    packages=find_packages(include=["licfile", "licfile.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "cryptography>=41",
        "click",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "licfile=licfile.cli:cli",
        ],
    },
)
