"""Package build script"""
import re
import setuptools

ver_file = 'VERSION'
__version__ = None

# Pull package version number from the VERSION file
with open(ver_file, 'r', encoding='utf-8') as f:
    for line in f.readlines():
        if re.match(r'^\s*#', line):  # comment
            continue

        verstr = re.match(r'^\s*v?(\d+\.\d+\.\d+(?:\.?[a-zA-Z0-9]+)?)\s*$', line)
        if verstr is not None:
            __version__ = verstr.group(1)
            break

    if __version__ is None:
        raise EnvironmentError(f'Could not find valid version number in {ver_file}; aborting setup')

with open("./README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="geoparcels",
    version=__version__,
    author="",
    author_email="",
    description="Cadastral parcel ingestion and WGS84 to local Gauss-Krüger grid conversion.",
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=setuptools.find_packages(
        include=('geoparcels*', ),
        exclude=('*tests', 'tests*')
    ),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent"
    ],
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.21',
        'pydantic>=2,<3',
        'requests>=2.25,<3',
    ],
    extras_require={
        'shapely': ['shapely>=2'],
        'test': ['pytest', 'shapely>=2'],
    },
)
