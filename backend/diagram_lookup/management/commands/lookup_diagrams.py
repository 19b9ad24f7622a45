import json

from django.core.management.base import BaseCommand, CommandError

from diagram_lookup.errors import DiagramLookupError
from diagram_lookup.pipelines.aggregator import DiagramAggregator
from diagram_lookup.serializers import ResultBundleSerializer
from diagram_lookup.services.query_refiner import NullQueryRefiner, get_query_refiner


class Command(BaseCommand):
    help = "Look up ranked Wikimedia Commons diagrams for a question and print them."

    def add_arguments(self, parser):
        parser.add_argument("question", help="Question or topic to find diagrams for")
        parser.add_argument(
            "--no-refine",
            action="store_true",
            help="Skip query refinement and search with the question as given",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the full result bundle as JSON",
        )

    def handle(self, *args, **options):
        refiner = NullQueryRefiner() if options["no_refine"] else get_query_refiner()
        aggregator = DiagramAggregator(refiner=refiner)

        try:
            bundle = aggregator.lookup(options["question"])
        except DiagramLookupError as e:
            raise CommandError(f"{e.category}: {e.message}")

        if options["json"]:
            self.stdout.write(json.dumps(ResultBundleSerializer(bundle).data, indent=2))
            return None

        self.stdout.write(f"{bundle.total} images for '{bundle.original_query}'")
        for rank, image in enumerate(bundle.images, 1):
            self.stdout.write(f"{rank}. {image.title}")
            self.stdout.write(f"   {image.full_url}")
            self.stdout.write(f"   {image.author} / {image.license}")
        return None
