"""
Stack Manager

Drives the web server program through the Pulumi Automation API, giving the
usual init / plan / apply / destroy lifecycle without a Pulumi.yaml on disk.
"""

import json
import os
from typing import Any, Callable, Dict, Optional

from pulumi import automation as auto

from .ec2.keypairs import remove_private_key
from .outputs import write_connection_files, remove_connection_files
from .web_server import WebServerSettings, deploy_web_server

def web_server_program():
    """Inline Pulumi program: settings come from the stack configuration."""
    deploy_web_server(WebServerSettings.from_pulumi_config())

def _plain_outputs(outputs: Dict[str, auto.OutputValue]) -> Dict[str, Any]:
    return {name: output.value for name, output in outputs.items()}

def _plain_summary(change_summary: Optional[Dict[Any, int]]) -> Dict[str, int]:
    return {getattr(op, "value", op): count for op, count in (change_summary or {}).items()}

class StackManager:
    """
    Manages the Pulumi stack holding one web server.
    """

    def __init__(
        self,
        settings: WebServerSettings,
        stack_name: str = "dev",
        work_dir: Optional[str] = None,
        backend_url: Optional[str] = None,
        output_dir: Optional[str] = None,
        on_output: Callable[[str], Any] = print,
    ):
        """
        Initialize the stack manager.

        Args:
            settings: Web server settings, written into the stack configuration
            stack_name: Name of the stack
            work_dir: Workspace directory for the engine (default: a temporary one)
            backend_url: State backend, e.g. ``file://~/.pulumi`` (default: the logged-in backend)
            output_dir: Where the side files with the IP and instance ID go (default: cwd)
            on_output: Callback receiving the engine's progress output
        """
        self.settings = settings
        self.stack_name = stack_name
        self.work_dir = work_dir
        self.backend_url = backend_url
        self.output_dir = output_dir or os.getcwd()
        self.on_output = on_output

    def _workspace_options(self) -> auto.LocalWorkspaceOptions:
        backend = auto.ProjectBackend(url=self.backend_url) if self.backend_url else None
        return auto.LocalWorkspaceOptions(
            work_dir=self.work_dir,
            project_settings=auto.ProjectSettings(
                name=self.settings.project,
                runtime="python",
                backend=backend,
            ),
        )

    def _config(self) -> Dict[str, auto.ConfigValue]:
        project = self.settings.project
        config = {
            "aws:region": auto.ConfigValue(value=self.settings.region),
            f"{project}:environment": auto.ConfigValue(value=self.settings.environment),
            f"{project}:keyName": auto.ConfigValue(value=self.settings.key_name),
            f"{project}:instanceType": auto.ConfigValue(value=self.settings.instance_type),
            f"{project}:sshCidr": auto.ConfigValue(value=self.settings.ssh_cidr),
            f"{project}:rootVolumeSize": auto.ConfigValue(value=str(self.settings.root_volume_size)),
        }
        if self.settings.profile:
            config["aws:profile"] = auto.ConfigValue(value=self.settings.profile)
        if self.settings.key_dir:
            config[f"{project}:keyDir"] = auto.ConfigValue(value=os.path.abspath(os.path.expanduser(self.settings.key_dir)))
        if self.settings.tags:
            config[f"{project}:tags"] = auto.ConfigValue(value=json.dumps(self.settings.tags))
        return config

    def select(self) -> auto.Stack:
        """
        Create or select the stack.

        The configuration written by ``init`` is left untouched, so later
        commands run against exactly the settings the stack was set up with.
        """
        return auto.create_or_select_stack(
            stack_name=self.stack_name,
            project_name=self.settings.project,
            program=web_server_program,
            opts=self._workspace_options(),
        )

    def init(self) -> Dict[str, Any]:
        """
        Create the stack (or select it if it exists) and configure it.

        Returns:
            Dict[str, Any]: The stack name and its configuration
        """
        stack = self.select()
        stack.set_all_config(self._config())
        config ={key: value.value for key, value in stack.get_all_config().items()}
        self.on_output(f"Stack '{stack.name}' ready in region {self.settings.region}")
        return {"stack": stack.name, "config": config}

    def plan(self, expect_no_changes: bool = False) -> Dict[str, int]:
        """
        Preview the changes an apply would make.

        Args:
            expect_no_changes: Fail if the engine would change anything

        Returns:
            Dict[str, int]: Count of resources per operation (create, same, update, ...)
        """
        stack = self.select()
        result = stack.preview(on_output=self.on_output, expect_no_changes=expect_no_changes)
        return _plain_summary(result.change_summary)

    def apply(self) -> Dict[str, Any]:
        """
        Deploy the web server and write the side files.

        Returns:
            Dict[str, Any]: The stack outputs
        """
        stack = self.select()
        result = stack.up(on_output=self.on_output)
        outputs = _plain_outputs(result.outputs)
        for path in write_connection_files(self.output_dir, outputs):
            self.on_output(f"Wrote {path}")
        return outputs

    def destroy(self) -> Dict[str, int]:
        """
        Tear down every resource in the stack and remove the side files and
        the private key file the stack was deployed with.

        Returns:
            Dict[str, int]: Count of resources per operation
        """
        stack = self.select()
        key_path = _plain_outputs(stack.outputs()).get("key_path")
        result = stack.destroy(on_output=self.on_output)
        for path in remove_connection_files(self.output_dir):
            self.on_output(f"Removed {path}")
        if key_path and remove_private_key(key_path):
            self.on_output(f"Removed {key_path}")
        return _plain_summary(result.summary.resource_changes)

    def outputs(self) -> Dict[str, Any]:
        """Get the current stack outputs."""
        return _plain_outputs(self.select().outputs())
