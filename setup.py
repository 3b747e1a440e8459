import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="cellgen",
    version="0.1.0",
    description="Layout primitive generators: contacts, bus spacing and multi-finger transistors",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={'': '.'},
    packages=setuptools.find_packages(include=['cellgen', 'cellgen.*']),
    package_data={'cellgen.tech.sky130': ['drc_config.yaml']},
    python_requires='>=3.10',
    install_requires = [
        'numpy',
        'shapely>=2.0',
        'gdstk',
        'pint',
        'click',
        'pyyaml',
        'cachetools>=5.4',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'cellgen = cellgen.cli:cli',
        ],
    },
)
