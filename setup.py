from setuptools import setup


setup(
    name="csv-clip",
    version="0.3.0",
    description="Convert CSV files into spreadsheet-safe tab-separated text for pasting",
    packages=["csv_clip"],
    python_requires=">=3.9",
    install_requires=[
        "chardet",
        "pyperclip",
        "pandas",
        "streamlit",
        "requests",
    ],
    entry_points={
        "console_scripts": [
            "csv-clip=csv_clip.cli:main",
        ]
    },
)
