import sys

from image_snipper.main import run

if __name__ == "__main__":
    sys.exit(run())
