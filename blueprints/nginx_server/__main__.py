"""
Nginx Web Server Blueprint

Deploys one Ubuntu 22.04 instance running Nginx, reachable over SSH and HTTP.
Configure it with Pulumi config, e.g.:

    pulumi config set aws:region ap-south-1
    pulumi config set aws:profile default
    pulumi config set keyName web-key
    pulumi up
"""

import os
import sys

# Add the project root to the path so the blueprint runs from a checkout
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from provisioner.web_server import WebServerSettings, deploy_web_server

deploy_web_server(WebServerSettings.from_pulumi_config())
