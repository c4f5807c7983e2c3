from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="lora-dataset-curator",
    version="1.0.0",
    author="LoRA Dataset Curator Team",
    description="Balance and coverage scoring plus exports for LoRA training image datasets",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=["models", "repositories", "services", "pipeline"],
    py_modules=["api_server", "main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Framework :: Flask",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Graphics",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "lora-dataset=main:main",
            "lora-dataset-api=api_server:main",
        ],
    },
    include_package_data=True,
    package_data={
        "pipeline": ["templates/*.html"],
    },
)
