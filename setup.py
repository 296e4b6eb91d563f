from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="minplus",
    version="1.0.0",
    author="the minplus authors",
    license="GPLv3",
    description="Exact (min,+) and (max,+) algebra of ultimately pseudo-periodic piecewise-affine curves",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=[
        "minplus",
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Natural Language :: English",
    ],
    install_requires=["numpy", "matplotlib"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.9",
)
