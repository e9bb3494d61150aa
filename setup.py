# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from setuptools import find_packages, setup

from src.batchqueue import __version__ as version

REQUIRED_PACKAGES = [
    "boto3 >= 1.34.0",
    "dill >= 0.4.0",
    "overrides >= 7.0.0",
]

TEST_PACKAGES = [
    "moto >= 5.0.0",
    "pytest",
    "mock",
]

setup(
    name="batchqueue",
    python_requires=">=3.10",
    version=version,
    description="batchqueue is a declarative resource provider for AWS Batch job queues.",
    keywords="aws batch job queue infrastructure declarative provider reconciliation",
    author="Amazon.com Inc.",
    author_email="dexcovery@amazon.com",
    license="Apache 2.0",
    packages=find_packages(where="src", exclude=("test",)),
    package_dir={"": "src"},
    install_requires=REQUIRED_PACKAGES,
    extras_require={"test": TEST_PACKAGES},
    include_package_data=True,
)
