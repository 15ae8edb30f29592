from setuptools import setup, find_packages

setup(
    name="koiro-lyrics",
    version="0.1.0",
    description="Time-coded, ruby-annotated lyrics documents: import, validation, playback sync and search",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"koiro_lyrics": ["py.typed"], "koiro_lyrics.i18n": ["*.json"]},
    install_requires=[
        "colorama",
        "regex",
        "typer",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "ruff",
            "mypy",
        ]
    },
    entry_points={
        "console_scripts": [
            "koiro-lyrics=koiro_lyrics.cli:main",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Text Processing",
    ],
    keywords="lyrics ruby furigana lrc synchronized search",
)
