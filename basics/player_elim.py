import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from basics.connection import Link
from basics.identity_set import Identity, IdentitySet
from utils import log_card, log_identities
from variants import card_count

if TYPE_CHECKING:
    from basics.card import Card
    from basics.state import State

logger = logging.getLogger(__name__)


class PlayerElim:
    """
    Elimination passes over a player's beliefs. Mixed into Player, which owns
    `thoughts`, `all_possible`, `all_inferred`, `links` and `elims`.
    """

    thoughts: list["Card"]
    all_possible: IdentitySet
    all_inferred: IdentitySet
    links: list[Link]
    elims: dict[Identity, set[int]]
    player_index: int

    def card_elim(self, state: "State") -> None:
        """
        Remove identities whose every copy is accounted for (played, discarded
        or known to be in some hand) from the cards that are not that copy.
        """
        certain: dict[Identity, set[int]] = defaultdict(set)
        for hand in state.hands:
            for order in hand:
                identity = self.id_of(self.thoughts[order])
                if identity is not None:
                    certain[identity].add(order)

        queue = list(self.all_possible)
        while queue:
            identity = queue.pop()
            if not self.all_possible.has(identity):
                continue
            if state.base_count(identity) + len(certain[identity]) != card_count(state.variant, identity):
                continue

            self.all_possible = self.all_possible.subtract(identity)
            self.all_inferred = self.all_inferred.subtract(identity)

            for hand in state.hands:
                for order in hand:
                    card = self.thoughts[order]
                    if order in certain[identity] or len(card.possible) <= 1 or not card.possible.has(identity):
                        continue

                    with self.edit(order) as draft:
                        draft.subtract("possible", identity)
                        draft.subtract("inferred", identity)

                    card = self.thoughts[order]
                    if len(card.inferred) == 0 and not card.reset:
                        self.reset_card(order)

                    new_id = self.id_of(self.thoughts[order])
                    if new_id is not None:
                        certain[new_id].add(order)
                        queue.append(new_id)

            logger.debug(
                "removing %s from %s's possibilities",
                log_card(identity, state.variant),
                self.name(state),
            )

    def good_touch_elim(self, state: "State", only_self: bool = False) -> list[int]:
        """
        Touched cards are assumed not to duplicate other touched cards whose
        identity is known, nor to be trash. Returns the orders of cards that lost
        every inference and had to be reset.
        """
        sources: dict[Identity, set[int]] = defaultdict(set)
        for hand in state.hands:
            for order in hand:
                card = self.thoughts[order]
                if not card.touched:
                    continue
                identity = self.id_of(card, infer=True)
                if identity is not None and not state.is_basic_trash(identity):
                    sources[identity].add(order)

        resets = []

        for i, hand in enumerate(state.hands):
            if only_self and i != self.player_index:
                continue

            for order in hand:
                card = self.thoughts[order]
                if not card.touched or len(card.possible) <= 1 or card.reset:
                    continue

                elim = [
                    identity
                    for identity, orders in sources.items()
                    if order not in orders and card.inferred.has(identity)
                ]
                elim += [
                    identity
                    for identity in card.inferred
                    if state.is_basic_trash(identity) and identity not in elim
                ]
                if not elim:
                    continue

                if len(card.inferred.subtract(elim)) == 0:
                    # trash only if every possibility is trash
                    if card.possible.every(state.is_basic_trash):
                        with self.edit(order) as draft:
                            draft.inferred = IdentitySet.empty(state.variant.num_suits)
                        continue
                    self.reset_card(order)
                    resets.append(order)
                    continue

                with self.edit(order) as draft:
                    draft.subtract("inferred", elim)

                for identity in elim:
                    self.elims.setdefault(identity, set()).add(order)

                logger.debug(
                    "good touch elim removed %s from card %d",
                    log_identities(elim, state.variant),
                    order,
                )

        return resets

    def reset_card(self, order: int) -> None:
        card = self.thoughts[order]
        logger.warning("card %d lost all inferences, resetting to its possibilities", order)
        with self.edit(order) as draft:
            draft.reset = True
            draft.inferred = card.possible
            if card.finessed:
                draft.finessed = False
                draft.hidden = False

    def restore_elim(self, state: "State", order: int, actual: Identity) -> None:
        """
        A card thought to be something else turned out to be `actual`. Give back
        the identities that were eliminated from other cards on its account.
        """
        card = self.thoughts[order]
        for identity in card.possibilities:
            if identity.matches(actual) or identity not in self.elims:
                continue

            for other in self.elims.pop(identity):
                if state.holder_of(other) is None:
                    continue
                other_card = self.thoughts[other]
                if other_card.possible.has(identity) and not other_card.inferred.has(identity):
                    with self.edit(other) as draft:
                        draft.union("inferred", identity)
                    logger.info(
                        "restored %s to card %d",
                        log_card(identity, state.variant),
                        other,
                    )

    def find_links(self, state: "State", hand_index: int) -> None:
        """
        Link cards in a hand that share the same few inferences when there are
        more of them than copies those inferences could account for.
        """
        hand = state.hands[hand_index]
        linked = {o for link in self.links for o in link.orders}

        for order in hand:
            card = self.thoughts[order]
            if order in linked or not card.touched or self.id_of(card, infer=True) is not None:
                continue
            if len(card.inferred) == 0 or len(card.inferred) > 3 or card.reset:
                continue

            orders = [
                o
                for o in hand
                if o not in linked
                and self.thoughts[o].touched
                and self.thoughts[o].inferred == card.inferred
                and self.id_of(self.thoughts[o], infer=True) is None
            ]
            copies = sum(state.remaining_copies(i) for i in card.inferred)
            if len(orders) > copies or len(orders) > len(card.inferred):
                link = Link(orders, card.inferred.array)
                logger.info("found link %s", link)
                self.links.append(link)
                linked.update(orders)

    def refresh_links(self, state: "State") -> None:
        kept = []
        for link in self.links:
            if link.promised:
                if all(state.holder_of(o) is not None for o in link.orders):
                    kept.append(link)
                continue

            orders = [
                o
                for o in link.orders
                if state.holder_of(o) is not None
                and self.id_of(self.thoughts[o], infer=True) is None
                and self.thoughts[o].inferred.some(lambda i: i in link.identities)
            ]
            if len(orders) > len(link.identities):
                kept.append(Link(orders, link.identities))
        self.links = kept

        for i in range(state.num_players):
            self.find_links(state, i)
