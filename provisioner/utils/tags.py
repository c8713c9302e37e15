from typing import Dict, Optional

MANAGED_BY = "ec2-nginx-provisioner"

def get_default_tags(project: str, environment: str = "dev") -> Dict[str, str]:
    """
    Get default tags for AWS resources.
    
    Args:
        project: Name of the project
        environment: Environment name (dev, prod, etc.)
    
    Returns:
        Dict[str, str]: Dictionary of default tags
    """
    return {
        "Project": project,
        "Environment": environment,
        "ManagedBy": MANAGED_BY,
    }

def merge_tags(default_tags: Dict[str, str], custom_tags: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Merge custom tags over the defaults; custom values win."""
    if not custom_tags:
        return dict(default_tags)
    
    return {**default_tags, **custom_tags}

def name_tags(default_tags: Dict[str, str], name: str) -> Dict[str, str]:
    """Default tags plus a ``Name`` tag, as shown in the EC2 console."""
    return merge_tags(default_tags, {"Name": name})
