"""
Boot-time configuration scripts for EC2 instances.

Scripts are rendered without any render-time values such as timestamps, so the
same settings always produce byte-identical user data and the instance is not
flagged for change on a re-run.
"""

from typing import Optional, Sequence

NGINX_USER_DATA_TEMPLATE = """#!/bin/bash
LOGFILE="/var/log/{project}-startup.log"
exec > >(tee -a $LOGFILE) 2>&1
set -euo pipefail

echo "===== {project} startup script - $(date) ====="

export DEBIAN_FRONTEND=noninteractive
apt-get update -y
apt-get install -y {packages}

systemctl enable nginx
systemctl start nginx

# Instance metadata (IMDSv2)
TOKEN=$(curl -s -X PUT "http://169.254.169.254/latest/api/token" -H "X-aws-ec2-metadata-token-ttl-seconds: 300")
metadata() {{
    curl -s -H "X-aws-ec2-metadata-token: $TOKEN" "http://169.254.169.254/latest/meta-data/$1"
}}

cat > /var/www/html/index.html << EOF
<!DOCTYPE html>
<html>
<head>
    <title>{title}</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 40px; line-height: 1.6; }}
        .info {{ background-color: #f4f4f4; padding: 20px; border-radius: 5px; }}
    </style>
</head>
<body>
    <h1>{title}</h1>
    <div class="info">
        <p><strong>Instance ID:</strong> $(metadata instance-id)</p>
        <p><strong>Availability Zone:</strong> $(metadata placement/availability-zone)</p>
        <p><strong>Public IP:</strong> $(metadata public-ipv4)</p>
    </div>
</body>
</html>
EOF

touch /var/lib/cloud/instance/nginx-ready
echo "===== {project} startup script completed - $(date) ====="
"""

def render_nginx_user_data(
    project: str,
    extra_packages: Sequence[str] = (),
    index_title: Optional[str] = None,
) -> str:
    """
    Render the user data that installs and starts Nginx on Ubuntu.

    Args:
        project: Project name, used for the log file and page title
        extra_packages: Additional apt packages to install alongside nginx
        index_title: Title of the landing page (default: the project name)

    Returns:
        str: The bash script
    """
    packages = ["nginx", "curl"]
    packages.extend(p for p in extra_packages if p not in packages)
    return NGINX_USER_DATA_TEMPLATE.format(
        project=project,
        packages=" ".join(packages),
        title=index_title or project,
    )
