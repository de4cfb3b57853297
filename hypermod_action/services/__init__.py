"""External collaborators: git, GitHub, the deployment source and tooling."""

from hypermod_action.services.git import GitClient
from hypermod_action.services.github import GitHubClient
from hypermod_action.services.hypermod_api import HypermodAPI
from hypermod_action.services.tooling import Tooling

__all__ = ["GitClient", "GitHubClient", "HypermodAPI", "Tooling"]
