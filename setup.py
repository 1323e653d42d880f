'''
This setup.py exists so that we can easily add sitemapper to the Python path
and install its dependencies.
'''
from setuptools import setup, find_packages
from pathlib import Path

here = Path(__file__).parent

# Get version
version = {}
with (here / "sitemapper" / "version.py").open() as f:
    exec(f.read(), version)

setup(
    name='sitemapper',
    version=version['__version__'],
    description='Streaming sitemap and sitemap index generation for content'
        ' trees',
    python_requires=">=3.7",
    keywords='sitemap xml seo',
    packages=find_packages(exclude=['docs', 'tests']),
    install_requires=[
        'python-dateutil',
        'trio',
        'yarl',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-trio',
        ],
    },
    entry_points={
        'console_scripts': [
            'sitemapper=sitemapper.__main__:main',
        ],
    },
)
