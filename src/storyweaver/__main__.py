"""Entry point for running the Story Weaver API as a module."""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "storyweaver.api.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nStory Weaver shutdown gracefully")
