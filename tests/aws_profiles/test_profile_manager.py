import pytest
from unittest.mock import patch, MagicMock
from botocore.exceptions import ClientError, NoCredentialsError, ProfileNotFound
from provisioner.errors import CredentialsError, ProfileNotFoundError
from provisioner.aws_profiles.profile_manager import (
    ProfileInfo,
    create_session,
    get_caller_identity,
    get_current_profile,
    list_profiles,
    validate_profile,
)

IDENTITY = {
    "Account": "123456789012",
    "Arn": "arn:aws:iam::123456789012:user/deployer",
    "UserId": "AIDAEXAMPLE",
    "ResponseMetadata": {},
}

def _session(identity=None, error=None, region="ap-south-1", profiles=()):
    session = MagicMock()
    session.region_name = region
    session.available_profiles = list(profiles)
    sts = session.client.return_value
    if error is not None:
        sts.get_caller_identity.side_effect = error
    else:
        sts.get_caller_identity.return_value = identity or IDENTITY
    return session

def test_get_current_profile_prefers_aws_profile(monkeypatch):
    """Test AWS_PROFILE wins over AWS_DEFAULT_PROFILE."""
    monkeypatch.setenv("AWS_PROFILE", "work")
    monkeypatch.setenv("AWS_DEFAULT_PROFILE", "other")
    
    assert get_current_profile() == "work"

def test_get_current_profile_falls_back(monkeypatch):
    """Test AWS_DEFAULT_PROFILE is used when AWS_PROFILE is unset."""
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.setenv("AWS_DEFAULT_PROFILE", "other")
    
    assert get_current_profile() == "other"

def test_get_current_profile_none(monkeypatch):
    """Test no profile means the default credential chain."""
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_DEFAULT_PROFILE", raising=False)
    
    assert get_current_profile() is None

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_create_session_unknown_profile(mock_session):
    """Test an unknown profile raises ProfileNotFoundError."""
    mock_session.side_effect = ProfileNotFound(profile="missing")
    
    with pytest.raises(ProfileNotFoundError, match="missing"):
        create_session("missing", "ap-south-1")

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_create_session_passes_region(mock_session):
    """Test the session is built for the profile and region."""
    create_session("work", "ap-south-1")
    
    mock_session.assert_called_once_with(profile_name="work", region_name="ap-south-1")

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_get_caller_identity(mock_session):
    """Test the STS identity is returned without response metadata."""
    mock_session.return_value = _session()
    
    identity = get_caller_identity("work", "ap-south-1")
    
    assert identity == {
        "Account": "123456789012",
        "Arn": "arn:aws:iam::123456789012:user/deployer",
        "UserId": "AIDAEXAMPLE",
    }
    mock_session.return_value.client.assert_called_once_with("sts")

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_get_caller_identity_no_credentials(mock_session):
    """Test missing credentials raise CredentialsError."""
    mock_session.return_value = _session(error=NoCredentialsError())
    
    with pytest.raises(CredentialsError):
        get_caller_identity()

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_validate_profile_success(mock_session):
    """Test valid credentials report the account."""
    mock_session.return_value = _session()
    
    valid, message = validate_profile("work", "ap-south-1")
    
    assert valid is True
    assert "123456789012" in message

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_validate_profile_rejected(mock_session):
    """Test rejected credentials return a failure instead of raising."""
    error = ClientError(
        {"Error": {"Code": "ExpiredToken", "Message": "The security token included in the request is expired"}},
        "GetCallerIdentity",
    )
    mock_session.return_value = _session(error=error)
    
    valid, message = validate_profile("work", "ap-south-1")
    
    assert valid is False
    assert "ExpiredToken" in message

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_validate_profile_unknown(mock_session):
    """Test an unknown profile is reported, not raised."""
    mock_session.side_effect = ProfileNotFound(profile="missing")
    
    valid, message = validate_profile("missing")
    
    assert valid is False
    assert "missing" in message

@patch("provisioner.aws_profiles.profile_manager.boto3.Session")
def test_list_profiles(mock_session, monkeypatch):
    """Test profiles are listed with the active one resolved via STS."""
    monkeypatch.setenv("AWS_PROFILE", "work")
    mock_session.return_value = _session(profiles=["work", "default"])
    
    profiles = list_profiles()
    
    assert [p.name for p in profiles] == ["default", "work"]
    default, work = profiles
    assert default.is_default and not default.is_active
    assert default.account_id is None
    assert work.is_active
    assert work.account_id == "123456789012"
    assert work.user_identity == "deployer"
    assert work.region == "ap-south-1"

def test_profile_info_str():
    """Test the profile summary line."""
    info = ProfileInfo("work", region="ap-south-1", is_active=True,
                       account_id="123456789012", user_identity="deployer")
    
    assert str(info) == "work - ap-south-1 - Account: 123456789012 [deployer] (ACTIVE)"
