from g2g_seller.interface.cli import app


if __name__ == "__main__":
    app()
