from setuptools import setup

VERSION = "0.1"

setup(
    name="splitposter",
    version=VERSION,
    author="Johannes 'josch' Schauer",
    author_email="josch@mister-muffin.de",
    description="Divide a raster image into a PDF of paper sized pages that can be put together into a poster.",
    long_description="Divide a raster image into a grid of tiles and put each "
    "tile centered on its own A4 or A3 PDF page, with cutting guides, page "
    "numbers and the position of the tile in the poster.",
    license="GPL-3",
    keywords="pdf poster image tiles",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Environment :: Console",
        "Environment :: X11 Applications",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Natural Language :: English",
        "Operating System :: OS Independent",
    ],
    py_modules=["splitposter"],
    python_requires=">=3.7",
    zip_safe=True,
    install_requires=["PyMuPDF", "Pillow"],
    extras_require={"test": ["pytest", "pdfrw"]},
    entry_points={
        "console_scripts": ["splitposter = splitposter:main"],
        "gui_scripts": ["splitposter-gui = splitposter:gui"],
    },
)
