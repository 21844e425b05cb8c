"""
LitPS - Lightweight PostScript to PDF Converter
pip install -e . 또는 python setup.py install
"""

from setuptools import setup, find_packages
from pathlib import Path

readme = Path(__file__).parent / "README.md"
long_description = readme.read_text(encoding='utf-8') if readme.exists() else ""

setup(
    name="litps",
    version="0.3.0",
    description="Lightweight PostScript to PDF Converter - 순수 Python으로 PostScript 서브셋을 PDF로 변환",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Your Name",
    author_email="your@email.com",
    url="https://github.com/yourusername/litps",
    license="MIT",

    packages=find_packages(include=['litps', 'litps.*']),

    python_requires=">=3.8",
    install_requires=[],

    extras_require={
        'dev': ['pytest>=7.0', 'pytest-cov>=4.0'],
    },

    entry_points={
        'console_scripts': [
            'litps=litps.__main__:main',
        ],
    },

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Printing",
        "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    ],

    keywords="postscript pdf converter ps2pdf lightweight",
)
