# console front end: connects input (device position, then typed city names) to the widget
# and prints every view state the widget applies.

from __future__ import annotations
from .client import WeatherAPIClient
from .config import Settings, setup_logging
from .location import IPGeolocation, LocationResolver
from .render import render
from .state import ViewState
from .widget import WeatherWidget

# worker threads are joined at interpreter exit, so quitting waits for a request already on the wire
PROMPT = "Enter city name (blank line to keep waiting, 'quit' to exit once any pending request ends): "


def show(state: ViewState) -> None:
    text = render(state)
    if text:
        print(f"\n{text}\n")


def main() -> None:
    setup_logging()
    settings = Settings.from_env()
    client = WeatherAPIClient(settings)
    resolver = LocationResolver(IPGeolocation())

    with WeatherWidget(client, resolver, on_change=show) as widget:
        widget.start()
        while True:
            try:
                text = input(PROMPT)
            except (EOFError, KeyboardInterrupt):
                break
            if text.strip().lower() == "quit":
                break
            # empty input is ignored by the widget itself
            widget.submit(text)


if __name__ == "__main__":
    main()
