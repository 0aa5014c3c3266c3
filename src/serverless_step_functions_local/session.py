"""
Offline Session

Runs an interactive local development session: registers the plugin with
the host, fires ``offline:start:init``, waits for the user to quit and then
fires ``before:offline:start:end``.
"""

from prompt_toolkit import prompt, styles
from colorama import Fore, Style

from .plugin import ServerlessStepFunctionsLocal

OFFLINE_START_INIT = "offline:start:init"
OFFLINE_START_END = "before:offline:start:end"


class OfflineSession:
    """
    Drives the offline lifecycle hooks around an interactive wait.

    Attributes:
        serverless: Host framework object
        plugin (ServerlessStepFunctionsLocal): The registered plugin
    """

    def __init__(self, serverless, options=None):
        self.serverless = serverless
        self.plugin = serverless.plugin_manager.register(ServerlessStepFunctionsLocal(serverless, options))
        self.prompt_style = styles.Style.from_dict({
            "prompt": "ansimagenta bold",
        })

    def _print_endpoints(self):
        endpoints = self.plugin.endpoints
        if not endpoints:
            print(f"{Fore.YELLOW}⚠️  No state machines registered{Style.RESET_ALL}")
            return
        print(f"\n{Fore.CYAN}{'='*80}")
        print(f"{Fore.CYAN}Step Functions Local state machines:")
        for variable, arn in endpoints.items():
            print(f"{Fore.CYAN}  • {variable} = {arn}")
        print(f"{Fore.CYAN}{'='*80}{Style.RESET_ALL}")

    def wait_for_quit(self):
        """Block until the user types 'quit' (or sends EOF / Ctrl-C)."""
        print(f"{Fore.YELLOW}Type 'quit' to stop Step Functions Local{Style.RESET_ALL}")
        while True:
            try:
                line = prompt([('class:prompt', '> ')], style=self.prompt_style).strip()
            except (EOFError, KeyboardInterrupt):
                print(f"\n{Fore.YELLOW}🛑 Session interrupted by user{Style.RESET_ALL}")
                return
            if line.lower() in ("quit", "exit", "q"):
                return

    def run(self):
        """Start, wait, and always fire the end hook once startup was attempted."""
        plugin_manager = self.serverless.plugin_manager
        try:
            plugin_manager.run_hook(OFFLINE_START_INIT)
            self._print_endpoints()
            self.wait_for_quit()
        finally:
            plugin_manager.run_hook(OFFLINE_START_END)
