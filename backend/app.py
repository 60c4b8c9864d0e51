try:
    from backend.impostor.cli import main
except ImportError:  # pragma: no cover
    from impostor.cli import main


if __name__ == "__main__":
    main()
