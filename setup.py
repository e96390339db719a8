from setuptools import setup, find_packages

setup(
    name="chrome-extension-scanner",
    version="0.1.0",
    description="Scans local Chromium browser profiles for extensions containing known indicator strings",
    author="debarshi17",
    author_email="your-email@example.com",
    url="https://github.com/debarshi17/chrome-extension-scanner",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "tqdm>=4.66.1",
        "colorama>=0.4.6",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "extension-scan=extension_scanner.scanner:main",
            "extension-scan-summary=extension_scanner.wrapper:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "Topic :: Security",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
    ],
)
