def main() -> None:
    """パッケージエントリポイント。cli.main() に委譲する。

    pyproject.toml の [project.scripts] は nixfoundry.cli:main を直接参照するため、
    この関数はプログラムから nixfoundry.main() として呼び出す場合の互換用。
    """
    from nixfoundry.cli import main as cli_main

    cli_main()
