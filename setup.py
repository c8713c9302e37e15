from setuptools import setup, find_packages

setup(
    name="ec2-nginx-provisioner",
    version="0.1.0",
    packages=find_packages(include=["provisioner", "provisioner.*"]),
    install_requires=[
        "pulumi>=3.0.0",
        "pulumi-aws>=6.0.0",
        "boto3>=1.26.0",
        "requests>=2.28.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "provision=provisioner.cli:main",
        ],
    },
    python_requires=">=3.8",
    description="Provision a single Nginx web server on AWS EC2 with Pulumi",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
