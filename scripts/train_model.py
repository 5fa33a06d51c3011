"""Command-line interface for training the scoring model and ranking products.

Trains the classifier on a JSON list of users and a product catalog, then
prints the ranked catalog for one of the users. Nothing is persisted: each
invocation is one train-then-predict cycle.

Example:
    Train with default settings and rank for the first user:
        $ python scripts/train_model.py data/users.json

    Train with custom parameters:
        $ python scripts/train_model.py data/users.json \\
            --catalog https://example.com/products.json \\
            --epochs 50 --user-index 3 --top-n 5
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from shopscore.recommender.backend import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_EPOCHS,
    DEFAULT_LEARNING_RATE,
    DEFAULT_RANDOM_STATE,
)
from shopscore.recommender.context import UNKNOWN_CATEGORY_POLICIES
from shopscore.recommender.encode import AGGREGATIONS
from shopscore.recommender.exceptions import ShopScoreError
from shopscore.recommender.session import DEFAULT_CATALOG_SOURCE, RecommenderSession
from shopscore.recommender.train import EpochEvent, ProgressEvent, TrainingConfig


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the script.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise, use INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace object containing parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Train the product scoring model and rank the catalog for a user.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Train with default settings
  python scripts/train_model.py data/users.json

  # Rank for the fourth user, keep the best five products
  python scripts/train_model.py data/users.json --user-index 3 --top-n 5

  # Average purchase vectors instead of taking their minimum
  python scripts/train_model.py data/users.json --aggregation mean
        """,
    )

    parser.add_argument(
        "users_path",
        type=str,
        help="Path to a JSON list of users: {age, purchases: [{name}, ...]}",
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default=DEFAULT_CATALOG_SOURCE,
        help=f"Catalog URL or JSON file (default: {DEFAULT_CATALOG_SOURCE})",
    )
    parser.add_argument(
        "--user-index",
        type=int,
        default=0,
        help="Position of the user to rank products for (default: 0)",
    )
    parser.add_argument(
        "--top-n",
        type=int,
        default=None,
        help="Only print the best N products (default: all)",
    )
    parser.add_argument(
        "--epochs",
        type=int,
        default=DEFAULT_EPOCHS,
        help=f"Number of training epochs (default: {DEFAULT_EPOCHS})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Mini-batch size (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--learning-rate",
        type=float,
        default=DEFAULT_LEARNING_RATE,
        help=f"Adam learning rate (default: {DEFAULT_LEARNING_RATE})",
    )
    parser.add_argument(
        "--random-state",
        type=int,
        default=DEFAULT_RANDOM_STATE,
        help=f"Random seed for reproducibility (default: {DEFAULT_RANDOM_STATE})",
    )
    parser.add_argument(
        "--aggregation",
        choices=sorted(AGGREGATIONS),
        default="min",
        help="How purchase vectors are combined into a user vector (default: min)",
    )
    parser.add_argument(
        "--unknown-category",
        choices=UNKNOWN_CATEGORY_POLICIES,
        default="zero",
        help="Unknown color/category handling (default: zero)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point for the training script.

    Returns:
        Exit code: 0 on success, 1 on error.
    """
    try:
        args = parse_arguments()

        setup_logging(verbose=args.verbose)
        logger = logging.getLogger(__name__)

        users_path = Path(args.users_path)
        if not users_path.is_file():
            raise FileNotFoundError(f"Users file not found: {args.users_path}")
        users = json.loads(users_path.read_text(encoding="utf-8"))

        if not 0 <= args.user_index < len(users):
            raise ValueError(
                f"--user-index {args.user_index} out of range for {len(users)} users"
            )

        config = TrainingConfig(
            aggregation=args.aggregation,
            unknown_category=args.unknown_category,
            epochs=args.epochs,
            batch_size=args.batch_size,
            learning_rate=args.learning_rate,
            random_state=args.random_state,
        )

        logger.info("=" * 70)
        logger.info("Training Configuration")
        logger.info("=" * 70)
        logger.info(f"Users file:     {args.users_path} ({len(users)} users)")
        logger.info(f"Catalog:        {args.catalog}")
        logger.info(f"Epochs:         {config.epochs}")
        logger.info(f"Batch size:     {config.batch_size}")
        logger.info(f"Learning rate:  {config.learning_rate}")
        logger.info(f"Aggregation:    {config.aggregation}")
        logger.info("=" * 70)

        def on_event(event) -> None:
            if isinstance(event, ProgressEvent):
                logger.info(f"Progress: {event.progress}%")
            elif isinstance(event, EpochEvent) and (
                event.epoch % 10 == 0 or event.epoch == config.epochs - 1
            ):
                logger.info(
                    f"Epoch {event.epoch + 1}/{config.epochs}: "
                    f"loss={event.loss:.4f} accuracy={event.accuracy:.4f}"
                )

        session = RecommenderSession(catalog_source=args.catalog, config=config)
        state = session.train(users, listener=on_event)

        logger.info("=" * 70)
        logger.info("Training Summary")
        logger.info("=" * 70)
        logger.info(f"Dimensions:       {state.context.dimensions}")
        logger.info(f"Training rows:    {state.metrics['rows']}")
        logger.info(f"Final loss:       {state.metrics['final_loss']:.4f}")
        logger.info(f"Final accuracy:   {state.metrics['final_accuracy']:.4f}")
        logger.info("=" * 70)

        recommendations = session.recommend(users[args.user_index], top_n=args.top_n)

        print(f"\nRecommendations for user #{args.user_index}:")
        for rank, item in enumerate(recommendations, start=1):
            print(
                f"  {rank:>3}. {item['name']:<30} score={item['score']:.4f} "
                f"({item.get('category')}, {item.get('color')}, {item.get('price')})"
            )
        print()

        return 0

    except FileNotFoundError as e:
        logging.error(f"File error: {e}")
        return 1
    except ShopScoreError as e:
        logging.error(f"{type(e).__name__} during {e.stage}: {e.message}")
        return 1
    except ValueError as e:
        logging.error(f"Validation error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.warning("Training interrupted by user")
        return 130
    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
