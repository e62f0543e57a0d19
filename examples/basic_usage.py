"""Basic usage example for the standards search service."""

import asyncio

from standards_search import StandardsService
from standards_search.config import Settings
from standards_search.models.query import ProcessRequestModel


async def basic_search_demo():
    """Demonstrate search, comparison and process generation."""
    print("Project Management Standards Search - Basic Usage Demo")
    print("=" * 50)

    # Initialize the service over the bundled seed corpus
    print("\n1. Initializing service...")
    async with StandardsService.create(settings=Settings(log_level="WARNING")) as service:

        for standard in service.list_standards():
            print(f"   {standard['title']}: {standard['_count']['sections']} sections")

        print("\n2. Searching within one standard...")
        response = service.search_standard(2, "risk")
        print(f"   '{response['query']}' in {response['standard']['title']}: {response['totalFound']} matches")
        for result in response["results"]:
            print(f"     {result['rank']}. {result['sectionNumber']} {result['title']} - Score: {result['similarity']:.2f}")

        print("\n3. Searching across all standards...")
        search_examples = [
            ("risk management", "Exact section title"),
            ("life cycle", "Title substring in two standards"),
            ("stakeholder engagement", "Phrase inside section bodies"),
        ]

        for query_text, description in search_examples:
            response = service.search_all(query_text, limit=5)
            print(f"\n   Query: '{query_text}' ({description})")
            for group in response["results"]:
                print(f"     {group['standard']['title']} (average {group['averageScore']:.2f})")
                for section in group["sections"]:
                    print(f"       - {section['sectionNumber']} {section['title']}: {section['similarity']:.2f}")

        print("\n4. Related sections...")
        related = service.related_sections(3, limit=3)
        for item in related["related"]:
            print(f"   {item['standard']['title']} {item['sectionNumber']} {item['title']} ({item['similarity']:.3f})")

        print("\n5. Topic comparison (fallback text without an API key)...")
        comparison = await service.compare_topic(1)
        data = comparison["comparisonData"]
        print(f"   {data['overallSummary']}")
        for standard in data["standards"]:
            sections = ", ".join(s["sectionTitle"] for s in standard["relevantSections"])
            print(f"   {standard['standardTitle']}: {sections}")

        print("\n6. Tailored process...")
        process = await service.generate_process(
            ProcessRequestModel(projectName="CRM rollout", lifecycle="agile", drivers="speed, quality")
        )
        print(f"   {process['summary']}")
        for phase in process["phases"]:
            activities = ", ".join(a["name"] for a in phase["activities"])
            print(f"   {phase['name']}: {activities}")

        stats = await service.get_stats()
        print(f"\n   Total searches performed: {stats['engine']['total_searches']}")
        print(f"   Average search time: {stats['engine']['avg_search_time']:.4f}s")

    print("\nDemo completed successfully!")


if __name__ == "__main__":
    asyncio.run(basic_search_demo())
