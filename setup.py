import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="collection_proxy",
    version="0.1.0",
    author="Baptiste Ferrand",
    author_email="bferrand.maths@gmail.com",
    description="A uniform proxy over any Python container: mappings, sequences, sets, arrays and iterables.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/B4PT0R/collection_proxy",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        "numpy",
        "python-dotenv",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires='>=3.10',
)
