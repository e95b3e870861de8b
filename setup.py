from setuptools import setup, find_packages


setup(
    name="tarpack",
    version="0.1",
    packages=find_packages(include=["tarpack", "tarpack.*"]),
    description="Pack directory trees into gzip/bzip2/xz tarballs in memory and restore them.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[],
)
