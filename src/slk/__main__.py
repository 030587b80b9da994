"""Entry point: uv run python -m slk"""


def main() -> None:
    from slk.server import mcp

    mcp.run()


if __name__ == "__main__":
    main()
