"""Console output helpers for the starter CLI and the movie demo."""


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    MAGENTA = '\033[35m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'


def bold(text: str) -> str:
    """Wrap text in bold."""
    return f"{Colors.BOLD}{text}{Colors.RESET}"


def highlight(text: str) -> str:
    """Wrap text in bold cyan, used for names the user should notice."""
    return f"{Colors.BOLD}{Colors.CYAN}{text}{Colors.RESET}"


def print_header(msg: str) -> None:
    """Print a header message."""
    print(f"{Colors.HEADER}{Colors.BOLD}{msg}{Colors.RESET}")


def print_info(msg: str) -> None:
    """Print an info message."""
    print(msg)


def print_success(msg: str) -> None:
    """Print a success message."""
    print(f"{Colors.GREEN}✓ {msg}{Colors.RESET}")


def print_warning(msg: str) -> None:
    """Print a warning message."""
    print(f"{Colors.YELLOW}⚠️  {msg}{Colors.RESET}")


def print_error(msg: str) -> None:
    """Print an error message."""
    print(f"{Colors.BOLD}{Colors.RED}[ERROR] {Colors.RESET}{msg}")
