"""
Provision a single Nginx web server on AWS EC2 with Pulumi.
"""

__version__ = "0.1.0"
