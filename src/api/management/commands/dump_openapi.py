"""Dump the OpenAPI schema in a json file."""

import json
import typing as t
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandParser
from ninja.responses import NinjaJSONEncoder

from api.api import api


class Command(BaseCommand):
    help = "Dump the OpenAPI schema of the ticketing API in a json file."

    def add_arguments(self, parser: CommandParser) -> None:
        """Allow overriding the output path."""
        parser.add_argument("--output", type=Path, default=None, help="Where to write the schema.")

    def handle(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Dump the OpenAPI schema to a JSON file."""
        output_file: Path = kwargs.get("output") or settings.BASE_DIR.parent / ".artifacts" / "openapi.json"
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(json.dumps(api.get_openapi_schema(), indent=2, cls=NinjaJSONEncoder))
        self.stdout.write(self.style.SUCCESS(f"OpenAPI schema dumped to {output_file}"))
