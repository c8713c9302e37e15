import pulumi
import pulumi_aws as aws
from typing import Optional, Dict, Tuple
import os
import stat
import tempfile
import subprocess

from ..errors import KeyMaterialError

# Owner read-only, the mode ssh insists on for identity files.
PRIVATE_KEY_MODE = stat.S_IRUSR

def default_key_path(name: str, key_dir: Optional[str] = None) -> str:
    """
    Path the private key for ``name`` is stored at.

    Defaults to ~/.ssh/{name}.pem
    """
    if not key_dir:
        key_dir = os.path.join(os.path.expanduser("~"), ".ssh")
    return os.path.join(os.path.expanduser(key_dir), f"{name}.pem")

def generate_key_material(bits: int = 4096) -> Tuple[str, str]:
    """
    Generate a new RSA key pair with ssh-keygen.

    Args:
        bits: RSA key size

    Returns:
        Tuple[str, str]: The PEM private key and the OpenSSH public key
    """
    with tempfile.TemporaryDirectory() as tmp_key_dir:
        tmp_key_file = os.path.join(tmp_key_dir, "key")
        try:
            subprocess.run(
                ["ssh-keygen", "-q", "-t", "rsa", "-b", str(bits), "-m", "PEM", "-N", "", "-f", tmp_key_file],
                check=True,
                capture_output=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            raise KeyMaterialError(f"ssh-keygen failed to generate a key: {e}") from e

        with open(tmp_key_file, "r") as f:
            private_key_content = f.read()
        with open(f"{tmp_key_file}.pub", "r") as f:
            public_key_content = f.read().strip()

    return private_key_content, public_key_content

def public_key_from_private(path: str) -> str:
    """Derive the OpenSSH public key from an existing private key file."""
    try:
        result = subprocess.run(
            ["ssh-keygen", "-y", "-f", path],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise KeyMaterialError(f"Error extracting public key from {path}: {e}") from e
    return result.stdout.strip()

def write_private_key(path: str, content: str) -> str:
    """
    Write a private key that is owner read-only from the moment it exists.

    Any existing file at ``path`` is replaced.
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, mode=0o700, exist_ok=True)

    remove_private_key(path)

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, PRIVATE_KEY_MODE)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    os.chmod(path, PRIVATE_KEY_MODE)
    return path

def remove_private_key(path: str) -> bool:
    """Delete a private key file. Returns False if there was none."""
    if not os.path.exists(path):
        return False
    os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    os.unlink(path)
    return True

def ensure_local_key(
    name: str,
    key_dir: Optional[str] = None,
    force_overwrite: bool = False,
    persist: bool = True,
) -> Tuple[str, str]:
    """
    Make sure a private key file exists for ``name``.

    An existing key file is reused, so repeated runs produce the same
    public key.

    Args:
        name: Name of the key pair
        key_dir: Directory for the key file (default: ~/.ssh)
        force_overwrite: Generate a fresh key even if one exists
        persist: Write a newly generated key to disk (False during previews)

    Returns:
        Tuple[str, str]: The private key path and the OpenSSH public key
    """
    save_path = default_key_path(name, key_dir)

    if os.path.exists(save_path) and not force_overwrite:
        public_key_content = public_key_from_private(save_path)
        if stat.S_IMODE(os.stat(save_path).st_mode) != PRIVATE_KEY_MODE:
            os.chmod(save_path, PRIVATE_KEY_MODE)
        return save_path, public_key_content

    private_key_content, public_key_content = generate_key_material()
    if not persist:
        return save_path, public_key_content
    write_private_key(save_path, private_key_content)
    print(f"Saved private key for '{name}' to '{save_path}'")
    return save_path, public_key_content

def ensure_keypair(
    name: str,
    key_dir: Optional[str] = None,
    tags: Optional[Dict[str, str]] = None,
    force_overwrite: bool = False,
    opts: Optional[pulumi.ResourceOptions] = None,
    persist: Optional[bool] = None,
) -> Tuple[aws.ec2.KeyPair, str]:
    """
    Ensures that a key pair exists with the given name.

    The KeyPair resource is always declared from the local key file, so the
    engine sees the same public key on every run and never replaces it.

    Args:
        name: Name of the key pair
        key_dir: Directory for the private key (default: ~/.ssh)
        tags: Optional tags to apply to the key pair
        force_overwrite: Whether to overwrite an existing key file
        opts: Optional Pulumi resource options
        persist: Write a newly generated key to disk (default: not during previews)

    Returns:
        Tuple[aws.ec2.KeyPair, str]: The key pair and the path to the private key file
    """
    if persist is None:
        persist = not pulumi.runtime.is_dry_run()
    save_path, public_key_content = ensure_local_key(name, key_dir, force_overwrite, persist)

    keypair = aws.ec2.KeyPair(
        name,
        key_name=name,
        public_key=public_key_content,
        tags=tags or {},
        opts=opts,
    )
    return keypair, save_path

