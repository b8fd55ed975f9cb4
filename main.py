#!/usr/bin/env python3
"""
Campaign Studio - Main Entry Point

Turns a brand brief into a campaign plan, images and videos.

Usage:
    # Plan a campaign (optionally render its assets)
    python main.py plan --brand "Cold-brew coffee for night owls" --image product.png

    # Generate single assets
    python main.py image --prompt "Bottle on a moonlit rooftop" --size 2K
    python main.py video --prompt "Slow push-in on the bottle" --aspect 9:16

    # Edit an image
    python main.py edit product.png --instruction "Add a neon-lit backdrop"

    # Start the HTTP API
    python main.py server
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("campaignstudio")


def print_progress(request_id: str, percent: int, message: str):
    print(f"[{request_id[:8]}] {percent:3d}% {message}")


def _studio(output_dir: Optional[str] = None):
    from core.config import get_config
    from core.credentials import prompt_for_key_interactively
    from services.studio import build_studio

    config = get_config()
    if output_dir:
        config.generation.output_dir = output_dir

    studio = build_studio(config=config, selector=prompt_for_key_interactively)
    studio.images.on_progress = print_progress
    studio.videos.on_progress = print_progress
    return studio


async def plan_campaign(args) -> int:
    """Research, plan, and optionally render the plan's assets."""
    from core.credentials import ensure_privileged_credential
    from core.errors import MediaGenerationError
    from services.campaign_planner import CampaignInput

    studio = _studio(args.output)
    campaign = CampaignInput(
        brand_description=args.brand,
        product_image_path=args.image,
        website_url=args.url or "",
        target_audience=args.audience or "",
        video_constraints=args.constraints or "",
        video_aspect_ratio=args.aspect,
    )

    try:
        try:
            await ensure_privileged_credential(studio.gate)
            research = await studio.planner.research_brand(campaign.website_url)
            plan = await studio.planner.generate_campaign_plan(campaign, research)
        except MediaGenerationError as e:
            logger.error(f"Planning failed: {e}")
            return 1

        plan_path = Path(studio.config.generation.output_dir) / "campaign_plan.json"
        plan_path.parent.mkdir(parents=True, exist_ok=True)
        plan_path.write_text(plan.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Plan '{plan.concept.title}' written to {plan_path}")

        jobs = []
        if args.render_images:
            jobs += [
                studio.images.generate(item.prompt, {"size": args.size, "aspect_ratio": plan.aspect_ratio})
                for item in plan.image_prompts
            ]
        if args.render_videos:
            jobs += [
                studio.videos.generate(
                    item.prompt,
                    {"aspect_ratio": plan.aspect_ratio, "resolution": args.resolution},
                    reference_image=args.image,
                )
                for item in plan.video_prompts
            ]

        results = await asyncio.gather(*jobs, return_exceptions=True)
        failures = 0
        for result in results:
            if isinstance(result, Exception):
                failures += 1
                logger.error(f"Asset failed: {result}")
            else:
                print(json.dumps(result.to_dict()))
        return 1 if failures else 0
    finally:
        await studio.close()


async def generate_asset(args) -> int:
    """Generate (or edit) a single asset and print it as JSON."""
    from core.errors import MediaGenerationError

    studio = _studio(args.output)
    try:
        if args.command == "image":
            asset = await studio.images.generate(args.prompt, {"size": args.size, "aspect_ratio": args.aspect})
        elif args.command == "video":
            asset = await studio.videos.generate(
                args.prompt,
                {"aspect_ratio": args.aspect, "resolution": args.resolution},
                reference_image=args.image,
            )
        else:
            asset = await studio.images.edit(args.image, args.instruction)
    except MediaGenerationError as e:
        logger.error(f"[{e.error_code}] {e.message}")
        return 1
    finally:
        await studio.close()

    print(json.dumps(asset.to_dict()))
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Campaign Studio - Brand brief to marketing plan, images and videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py plan --brand "Trail shoes for rainy cities" --url https://example.com --render-images
    python main.py image --prompt "Shoe splashing through a puddle" --size 4K --aspect 16:9
    python main.py video --prompt "Runner at dawn" --aspect 9:16 --resolution 720p --image shoe.png
    python main.py edit shoe.png --instruction "Make it matte black"
    python main.py server --port 8765
        """,
    )
    parser.add_argument("--output", "-o", help="Output directory (default: $OUTPUT_DIR or ./output)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Plan command
    plan_parser = subparsers.add_parser("plan", help="Research a brand and plan a campaign")
    plan_parser.add_argument("--brand", "-b", required=True, help="Brand description")
    plan_parser.add_argument("--image", "-i", help="Product image path")
    plan_parser.add_argument("--url", "-u", help="Brand website for research")
    plan_parser.add_argument("--audience", "-a", help="Target audience")
    plan_parser.add_argument("--constraints", "-c", help="Video constraints (duration, style)")
    plan_parser.add_argument("--aspect", choices=["16:9", "9:16"], default="16:9", help="Video aspect ratio")
    plan_parser.add_argument("--render-images", action="store_true", help="Generate the plan's images")
    plan_parser.add_argument("--render-videos", action="store_true", help="Generate the plan's videos")
    plan_parser.add_argument("--size", choices=["1K", "2K", "4K"], default="1K", help="Image size")
    plan_parser.add_argument("--resolution", choices=["720p", "1080p"], default="720p", help="Video resolution")

    # Image command
    image_parser = subparsers.add_parser("image", help="Generate an image")
    image_parser.add_argument("--prompt", "-p", required=True, help="Image prompt")
    image_parser.add_argument("--size", choices=["1K", "2K", "4K"], default="1K", help="Image size")
    image_parser.add_argument(
        "--aspect", choices=["1:1", "16:9", "9:16", "3:4", "4:3"], default="1:1", help="Aspect ratio"
    )

    # Video command
    video_parser = subparsers.add_parser("video", help="Generate a video")
    video_parser.add_argument("--prompt", "-p", required=True, help="Video prompt")
    video_parser.add_argument("--aspect", choices=["16:9", "9:16"], default="16:9", help="Aspect ratio")
    video_parser.add_argument("--resolution", choices=["720p", "1080p"], default="720p", help="Resolution")
    video_parser.add_argument("--image", "-i", help="Reference (first frame) image")

    # Edit command
    edit_parser = subparsers.add_parser("edit", help="Edit an image with an instruction")
    edit_parser.add_argument("image", help="Image to edit")
    edit_parser.add_argument("--instruction", "-n", required=True, help="Edit instruction")

    # Server command
    server_parser = subparsers.add_parser("server", help="Start the HTTP API")
    server_parser.add_argument("--host", default="0.0.0.0", help="Host to bind")
    server_parser.add_argument("--port", type=int, default=8765, help="Port to bind")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "server":
        import uvicorn
        from core.config import get_config

        if args.output:
            get_config().generation.output_dir = args.output
        uvicorn.run("services.api.server:app", host=args.host, port=args.port)

    elif args.command == "plan":
        sys.exit(asyncio.run(plan_campaign(args)))

    else:
        sys.exit(asyncio.run(generate_asset(args)))


if __name__ == "__main__":
    main()
